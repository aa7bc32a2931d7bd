from app.routers import ai, auth, controls, dashboard, protocols, reports, risks, treatment, user, wizard

__all__ = [
    "ai",
    "auth",
    "controls",
    "dashboard",
    "protocols",
    "reports",
    "risks",
    "treatment",
    "user",
    "wizard",
]
