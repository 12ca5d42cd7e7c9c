from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from db.session import get_db
from core.auth import get_current_merchant_id
from crud.api_key import get_api_keys_by_merchant, create_api_key, set_api_key_active, delete_api_key
from schemas.api_key import ApiKeyCreate, ApiKeyToggle, ApiKeyResponse
from utilities.response import success_response

router = APIRouter(prefix="/api-keys", tags=["api-keys"])

def _not_found():
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="API key not found")

@router.get("")
async def list_api_keys(
    merchant_id: str = Depends(get_current_merchant_id),
    db: Session = Depends(get_db)
):
    keys = get_api_keys_by_merchant(db, merchant_id)
    return success_response([ApiKeyResponse.model_validate(k) for k in keys], "API keys retrieved successfully")

@router.post("", status_code=status.HTTP_201_CREATED)
async def generate_api_key(
    body: ApiKeyCreate,
    merchant_id: str = Depends(get_current_merchant_id),
    db: Session = Depends(get_db)
):
    api_key = create_api_key(db, merchant_id, body.network)
    return success_response(
        ApiKeyResponse.model_validate(api_key),
        f"Your new {body.network} API key has been generated successfully."
    )

@router.patch("/{key_id}")
async def toggle_api_key(
    key_id: str,
    body: ApiKeyToggle,
    merchant_id: str = Depends(get_current_merchant_id),
    db: Session = Depends(get_db)
):
    api_key = set_api_key_active(db, merchant_id, key_id, body.is_active)
    if not api_key:
        raise _not_found()
    state = "enabled" if body.is_active else "disabled"
    return success_response(ApiKeyResponse.model_validate(api_key), f"The API key has been {state} successfully.")

@router.delete("/{key_id}")
async def remove_api_key(
    key_id: str,
    merchant_id: str = Depends(get_current_merchant_id),
    db: Session = Depends(get_db)
):
    if not delete_api_key(db, merchant_id, key_id):
        raise _not_found()
    return success_response(None, "The API key has been deleted.")
