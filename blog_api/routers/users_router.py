# blog_api/routers/users_router.py
from fastapi import APIRouter, Depends

from .deps import get_user_service, role_required
from ..application.services.user_service import UserService
from ..core.roles import Role
from ..core.security import Claims
from ..exceptions import create_success_response
from ..schemas import UpdateRoleRequest, UserResponse, WarningsResponse

router = APIRouter(prefix="/api/users", tags=["Users"])

admin_only = role_required(Role.ADMIN)


@router.get("")
def list_users(claims: Claims = Depends(admin_only), service: UserService = Depends(get_user_service)):
    users = service.list_users(claims)
    return create_success_response([UserResponse.model_validate(u).model_dump(mode="json") for u in users])


@router.put("/{user_id}/role")
def update_role(
    user_id: str,
    body: UpdateRoleRequest,
    claims: Claims = Depends(admin_only),
    service: UserService = Depends(get_user_service),
):
    user = service.update_role(claims, user_id, body.role)
    return create_success_response(UserResponse.model_validate(user).model_dump(mode="json"))


@router.delete("/{user_id}")
def delete_user(user_id: str, claims: Claims = Depends(admin_only), service: UserService = Depends(get_user_service)):
    result = service.delete_user(claims, user_id)
    response = WarningsResponse(message="User deleted", warnings=result.warnings)
    return create_success_response(response.model_dump())
