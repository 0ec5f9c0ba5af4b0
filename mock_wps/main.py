"""Stub WPS + user directory server backed by the in-memory doubles"""

from fastapi import FastAPI, HTTPException

from peydey_sdk.infrastructure.clients.authority import ExternalAuthority, MockAuthority
from peydey_sdk.infrastructure.clients.directory import MockUserDirectory, UserDirectory
from peydey_sdk.infrastructure.clients.schemas import (
    LookupRequest,
    ProcessingResponse,
    ProcessRequest,
    UserSchema,
    ValidateRequest,
    ValidationResponse,
)


def create_app(authority: ExternalAuthority | None = None, directory: UserDirectory | None = None) -> FastAPI:
    """Create the stub app; defaults answer instantly"""
    authority = authority or MockAuthority(latency_seconds=0)
    directory = directory or MockUserDirectory(latency_seconds=0)

    app = FastAPI(title="Mock WPS Server", version="1.0.0")

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.post("/directory/lookup", response_model=UserSchema)
    async def lookup_user(body: LookupRequest):
        user = await directory.lookup(body.to_domain())
        if user is None:
            raise HTTPException(status_code=404, detail="user not found")
        return UserSchema.model_validate(user)

    @app.post("/wps/validate", response_model=ValidationResponse)
    async def validate_user(body: ValidateRequest):
        result = await authority.validate_user(body.credentials.to_domain(), body.request.to_domain())
        return ValidationResponse.model_validate(result)

    @app.post("/wps/withdrawals", response_model=ProcessingResponse)
    async def process_withdrawal(body: ProcessRequest):
        result = await authority.process_withdrawal(body.request.to_domain(), body.validation.to_domain())
        return ProcessingResponse.model_validate(result)

    return app


app = create_app()
