"""
压缩包解压

解压 zip 格式的构件。整体解压时单个条目出错只记录日志：
不同库的原生文件重名是正常情况。
"""

import asyncio
import os
import shutil
import zipfile

from loguru import logger

from launchfetch.exceptions import ArchiveError


class ArchiveExtractor:
    """zip 解压器"""

    @staticmethod
    def _target_path(dest_dir: str, member: str) -> str:
        target = os.path.realpath(os.path.join(dest_dir, member))
        root = os.path.realpath(dest_dir)
        if target != root and not target.startswith(root + os.sep):
            raise ArchiveError(
                f"条目路径超出目标目录: {member}", context={"entry": member}
            )
        return target

    def extract_all(self, archive_path: str, dest_dir: str) -> int:
        """
        解压全部条目到 dest_dir（覆盖已有文件）

        Returns:
            成功解压的条目数
        """
        try:
            archive = zipfile.ZipFile(archive_path)
        except (zipfile.BadZipFile, OSError) as e:
            error = ArchiveError(
                f"无法打开压缩包: {e}", context={"archive": archive_path}
            )
            logger.warning(f"[解压] {error}")
            return 0

        extracted = 0
        os.makedirs(dest_dir, exist_ok=True)
        with archive:
            for info in archive.infolist():
                try:
                    target = self._target_path(dest_dir, info.filename)
                    if info.is_dir():
                        os.makedirs(target, exist_ok=True)
                        continue
                    os.makedirs(os.path.dirname(target), exist_ok=True)
                    with archive.open(info) as src, open(target, "wb") as dst:
                        shutil.copyfileobj(src, dst)
                    extracted += 1
                except ArchiveError as e:
                    logger.warning(f"[解压] {e}")
                except (zipfile.BadZipFile, OSError, KeyError) as e:
                    logger.warning(
                        f"[解压] 条目 '{info.filename}' 解压失败 ({archive_path}): {e}"
                    )

        return extracted

    def extract_entry(self, archive_path: str, entry: str, dest_dir: str) -> str:
        """
        解压单个条目到 dest_dir（不保留目录结构）

        Returns:
            解压后的文件路径

        Raises:
            ArchiveError: 压缩包无法读取或条目不存在
        """
        try:
            with zipfile.ZipFile(archive_path) as archive:
                try:
                    info = archive.getinfo(entry)
                except KeyError:
                    raise ArchiveError(
                        f"压缩包中不存在条目: {entry}",
                        context={"archive": archive_path, "entry": entry},
                    )
                os.makedirs(dest_dir, exist_ok=True)
                target = os.path.join(dest_dir, os.path.basename(info.filename))
                with archive.open(info) as src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)
                return target
        except (zipfile.BadZipFile, OSError) as e:
            raise ArchiveError(
                f"无法读取压缩包: {e}",
                context={"archive": archive_path, "entry": entry},
            )

    async def extract_all_async(self, archive_path: str, dest_dir: str) -> int:
        return await asyncio.to_thread(self.extract_all, archive_path, dest_dir)

    async def extract_entry_async(
        self, archive_path: str, entry: str, dest_dir: str
    ) -> str:
        return await asyncio.to_thread(
            self.extract_entry, archive_path, entry, dest_dir
        )
