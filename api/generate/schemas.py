from pydantic import BaseModel, Field


class GenerateTextResponse(BaseModel):
    text: str = Field(..., description="Model output, or the refusal message for links in summarize mode")


class GenerateErrorBody(BaseModel):
    error: str
