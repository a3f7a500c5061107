"""
Recipe Share Admin Endpoints
Audit trail, role changes, account removal and maintenance
"""

from typing import Optional

from fastapi import APIRouter, Body, Query

from core.dependencies import AuthenticatedPrincipal, DbSession, PaginationParams
from schemas.admin_schemas import AdminActionList, AdminActionResponse, RoleChange, SweepResponse, ActionReason
from schemas.auth_schemas import User
from services import admin_service, maintenance_service
from services.policy import EntityType, Operation, enforce

router = APIRouter()


@router.get("/actions", response_model=AdminActionList)
def list_actions(
    principal: AuthenticatedPrincipal,
    db: DbSession,
    pagination: PaginationParams,
    action_type: Optional[str] = Query(None, max_length=50),
    target_id: Optional[str] = None,
):
    items, total = admin_service.list_admin_actions(
        db, principal,
        action_type=action_type,
        target_id=target_id,
        limit=pagination["limit"],
        offset=pagination["offset"],
    )
    return AdminActionList(items=[AdminActionResponse.model_validate(item) for item in items], total=total)


@router.put("/users/{user_id}/role", response_model=User)
def change_role(user_id: str, data: RoleChange, principal: AuthenticatedPrincipal, db: DbSession):
    return admin_service.change_user_role(db, principal, user_id, data.role, reason=data.reason)


@router.post("/users/{user_id}/deactivate", response_model=User)
def deactivate_user(
    user_id: str,
    principal: AuthenticatedPrincipal,
    db: DbSession,
    data: Optional[ActionReason] = Body(None),
):
    return admin_service.deactivate_user(db, principal, user_id, reason=data.reason if data else None)


@router.delete("/users/{user_id}")
def delete_user(
    user_id: str,
    principal: AuthenticatedPrincipal,
    db: DbSession,
    reason: Optional[str] = Query(None, max_length=500),
):
    """Hard delete a user and everything they own"""
    removed = admin_service.hard_delete_user(db, principal, user_id, reason=reason)
    return {"user_id": user_id, "removed": removed}


@router.post("/maintenance/sweep", response_model=SweepResponse)
def run_sweep(principal: AuthenticatedPrincipal, db: DbSession):
    """Run one maintenance pass now instead of waiting for the worker"""
    enforce(principal, Operation.CREATE, EntityType.ADMIN_ACTION)
    sweep, counters = maintenance_service.run_maintenance(db)
    return SweepResponse(
        expired_conversations_deleted=sweep.deleted,
        expired_conversations_failed=sweep.failed,
        favorite_counts_fixed=counters.favorite_counts_fixed,
        collection_counts_fixed=counters.collection_counts_fixed,
    )
