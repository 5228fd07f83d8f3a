# app/api/v1/routes/auth.py
from fastapi import APIRouter, Request, Response, status

router = APIRouter(prefix="/auth", tags=["Authentication"])

@router.post("/jwt/logout", status_code=status.HTTP_200_OK)
async def logout(
    request: Request,
    response: Response
):
    """
    Logout endpoint that doesn't require authentication.
    Bearer tokens are stateless, so this only clears the access token cookie
    if one was set.
    """
    response.delete_cookie(key="access_token")

    return {"detail": "Successfully logged out"}
