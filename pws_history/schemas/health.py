from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    ok: bool = Field(default=True)
    status: str = Field()
    uptime_s: float = Field(ge=0)
    version: str = Field()
    wu_configured: bool = Field(description="Whether an upstream API key is set")
