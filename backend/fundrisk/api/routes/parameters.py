from fastapi import APIRouter

from fundrisk.services.parameter_service import get_parameter_status

router = APIRouter(tags=["parameters"])


@router.get("/parameters/status")
def get_parameters_status():
    """Return version, source and override errors of the active parameter tables."""
    return get_parameter_status()
