"""
Service layer abstraction.

Each service encapsulates business logic for a domain.  API handlers
call into these classes and translate their exceptions into HTTP
errors; services never raise ``HTTPException`` themselves.
"""
