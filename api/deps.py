"""
API 共用 dependencies
"""
from fastapi import Request

from database import get_settings


def get_base_url(request: Request) -> str:
    """
    Join link 的 base URL

    優先使用設定的 base_url（部署在 proxy 後面時），否則用 request 的 base URL
    """
    return get_settings().base_url or str(request.base_url)
