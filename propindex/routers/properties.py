from fastapi import APIRouter, Depends, Request
from ..core.security import client_key
from ..schemas import EndpointInfo, LookupResult
from ..services.lookup_service import PropertyLookupService

router = APIRouter()

def service_dep(request: Request) -> PropertyLookupService:
    # Built once by create_app(); holds the limiter and cache state.
    return request.app.state.lookup_service

@router.post("/properties", response_model=LookupResult)
async def post_properties(
    request: Request,
    svc: PropertyLookupService = Depends(service_dep),
):
    try:
        body = await request.json()
    except ValueError:
        body = None  # rejected by the validator as a non-object body
    return await svc.lookup(body, client_key(request))

@router.get("/properties", response_model=EndpointInfo)
async def describe_properties(svc: PropertyLookupService = Depends(service_dep)):
    return svc.describe()
