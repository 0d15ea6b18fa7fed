"""
Delivery Module - Dependencies
================================
The channel registry built in the app lifespan, injected via Depends().
"""

from fastapi import Request

from modules.delivery.channels import ChannelRegistry


def get_channels(request: Request) -> ChannelRegistry:
    return request.app.state.channels
