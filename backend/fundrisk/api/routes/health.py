from fastapi import APIRouter

from fundrisk.parameters.registry import ParameterRegistry

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check():
    registry = ParameterRegistry.get()
    parameter_status = (
        {"status": "loaded", "version": registry.parameters.version}
        if registry.is_loaded
        else {"status": "not_loaded"}
    )
    return {
        "status": "ok",
        "parameters": parameter_status,
    }
