from fastapi import APIRouter

# Connection strings may carry credentials.
_HIDDEN_KEYS = frozenset({"DATABASE_URL"})


def create_systems_router(container_env: dict, job_runner=None):
    """Health and configuration endpoints for operators."""
    router = APIRouter(prefix="/systems", tags=["System"])

    @router.get("/health")
    def health():
        active = job_runner.list_active() if job_runner is not None else []
        return {"status": "ok", "active_jobs": active}

    @router.get("/config")
    def get_config():
        """Effective settings the service started with, minus secrets."""
        environment = {}
        for key, value in container_env.items():
            if key in _HIDDEN_KEYS:
                continue
            environment[key] = str(value) if value is not None else None
        return {"environment": environment}

    return router
