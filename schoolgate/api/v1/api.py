"""
V1 API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from schoolgate.api.v1.endpoints import (
    audit,
    auth,
    classes,
    events,
    health,
    schools,
    students,
    subjects,
    super_admin,
    teachers,
)

api_router = APIRouter()

# Auth (login, refresh, invite acceptance, me)
api_router.include_router(auth.router)

# Tenant-scoped resources
api_router.include_router(schools.router)
api_router.include_router(students.router)
api_router.include_router(teachers.router)
api_router.include_router(classes.router)
api_router.include_router(subjects.router)
api_router.include_router(events.router)

# Audit trail, platform administration
api_router.include_router(audit.router)
api_router.include_router(super_admin.router)

# Health
api_router.include_router(health.router)
