from typing import List, Literal, Optional, Union

from pydantic import BaseModel


class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolEnvelope(BaseModel):
    content: List[TextContent]

    @classmethod
    def from_text(cls, text: str) -> "ToolEnvelope":
        return cls(content=[TextContent(text=text)])


RequestId = Union[str, int, float]


class RpcError(BaseModel):
    code: int
    message: str


class RpcErrorResponse(BaseModel):
    jsonrpc: Literal["2.0"] = "2.0"
    error: RpcError
    id: Optional[RequestId] = None


METHOD_NOT_ALLOWED = RpcErrorResponse(
    error=RpcError(code=-32000, message="Method not allowed.")
)


def internal_error(request_id: Optional[RequestId] = None) -> RpcErrorResponse:
    return RpcErrorResponse(
        error=RpcError(code=-32603, message="Internal server error"), id=request_id
    )
