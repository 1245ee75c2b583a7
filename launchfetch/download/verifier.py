"""
文件校验器

实现 SHA1 流式校验、文件存在性检查。
"""

import hashlib
import os

import aiofiles

from launchfetch.exceptions import VerifyNotFoundError

READ_SIZE = 64 * 1024


class FileVerifier:
    """文件校验器"""

    @staticmethod
    async def calc_sha1(file_path: str) -> str:
        """
        计算文件的 SHA1 值

        分块读取，不会把整个文件读入内存。

        Args:
            file_path: 文件路径

        Returns:
            小写十六进制 SHA1

        Raises:
            VerifyNotFoundError: 文件不存在
        """
        if not os.path.isfile(file_path):
            raise VerifyNotFoundError(
                f"文件不存在: {file_path}", context={"path": file_path}
            )

        sha1 = hashlib.sha1()
        async with aiofiles.open(file_path, "rb") as f:
            while True:
                data = await f.read(READ_SIZE)
                if not data:
                    break
                sha1.update(data)
        return sha1.hexdigest()

    @staticmethod
    async def verify_sha1(file_path: str, expected_sha1: str) -> bool:
        """校验文件的 SHA1 是否匹配（忽略大小写）"""
        current_sha1 = await FileVerifier.calc_sha1(file_path)
        return current_sha1 == expected_sha1.strip().lower()

    @staticmethod
    def is_present(file_path: str) -> bool:
        """文件存在且不为空"""
        return os.path.isfile(file_path) and FileVerifier.get_size(file_path) > 0

    @staticmethod
    def get_size(file_path: str) -> int:
        """获取文件大小"""
        try:
            return os.path.getsize(file_path)
        except OSError:
            return 0
