"""
启动参数数据模型
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Authorization:
    """登录信息（由外部获取）"""

    access_token: str = "0"
    name: str = "Player"
    uuid: str = "00000000-0000-0000-0000-000000000000"
    user_properties: str = "{}"


@dataclass
class ServerAddress:
    host: str
    port: Optional[str] = None


@dataclass
class ProxySettings:
    host: str
    port: Optional[str] = None
    username: str = ""
    password: str = ""


@dataclass
class LaunchOptions:
    """启动选项"""

    root: str
    version_number: str
    version_type: str = "release"
    authorization: Optional[Authorization] = None
    server: Optional[ServerAddress] = None
    proxy: Optional[ProxySettings] = None
