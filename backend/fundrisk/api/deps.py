from datetime import date


def get_as_of() -> date:
    """FastAPI dependency supplying the evaluation date for time-dependent outputs."""
    return date.today()
