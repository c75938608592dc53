from fastapi import Request

from core.registry import CurationRegistry


def get_registry(request: Request) -> CurationRegistry:
    return request.app.state.registry
