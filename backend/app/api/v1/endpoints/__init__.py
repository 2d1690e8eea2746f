# API endpoints
from . import evaluations, health, projects, teams

__all__ = ["evaluations", "health", "projects", "teams"]
