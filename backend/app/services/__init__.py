# Services package init
"""
WellNest Backend — Services Layer
==================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
How:   Stateless service classes with module-level singletons. Each operation
       takes the request's AsyncSession explicitly and returns ORM rows or a
       Page; routes turn those into response schemas.

Service Inventory:
    - authorization: pure access-control policy (Principal, capabilities, Decision)
    - query_builder: request parameters → backend-neutral QueryFilter
    - store: QueryFilter → SQLAlchemy statements, paging, error mapping
    - AuthService: password hashing, token issue/verification, login
    - EmployeeService: employee accounts, master-code deletes, stats, bulk status
    - EventService: admin and public event listings, featured event, CRUD
    - PractitionerService: admin and public directory, featured list, CRUD
    - UploadService: image validation, storage, metadata, deletion
    - DatabaseKeepAlive: periodic SELECT 1 so idle pools don't go stale
"""
