"""Shared router dependencies"""

from fastapi import Request

from mutation_guard.services.gateway import MutationGateway


def get_gateway(request: Request) -> MutationGateway:
    """The gateway built at startup lives on the application state"""
    return request.app.state.gateway
