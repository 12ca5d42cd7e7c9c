from typing import Any, Dict, Optional, TYPE_CHECKING
from pydantic import BaseModel

if TYPE_CHECKING:
    from core.errors import PaymentError

class APIResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    data: Optional[Any] = None

class PaymentErrorData(BaseModel):
    error: str
    # Set when the customer's transfer already confirmed on-chain
    transfer_signature: Optional[str] = None

def _envelope(success: bool, data: Any, message: Optional[str]) -> Dict:
    return APIResponse(success=success, data=data, message=message).model_dump(mode="json")

def success_response(data: Any = None, message: str = None) -> Dict:
    """Create a success response"""
    return _envelope(True, data, message)

def error_response(message: str, data: Any = None) -> Dict:
    """Create an error response"""
    return _envelope(False, data, message)

def payment_error_response(exc: "PaymentError") -> Dict:
    """Error envelope carrying the machine code and any confirmed transfer"""
    return error_response(
        exc.message,
        PaymentErrorData(error=exc.code, transfer_signature=exc.transfer_signature),
    )
