"""Query builders for database operations.

This module provides composable query builder classes that encapsulate
filter logic, making services cleaner and queries more testable.

Usage:
    from app.queries import BaseQuery

    results = (
        BaseQuery(db, Student, {"id": Student.id, "last_name": Student.last_name})
        .where(Student.enrolled.is_(True))
        .order_by("last_name", "desc")
        .paginate(limit=20, offset=0)
        .all()
    )
"""

from app.queries.base import BaseQuery

__all__ = ["BaseQuery"]
