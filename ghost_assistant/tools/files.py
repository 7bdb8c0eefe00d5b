"""File system tools: create, read, write, list, move, copy, delete, inspect."""

from __future__ import annotations

import datetime
import os
import shutil
import stat
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ..log import logger
from ..util.time import format_timestamp
from .base import NonBlankStr, ToolExecutionError, ToolParameters, validate_parameters
from .utils import format_size

MAX_READ_BYTES = 1 * 1024 * 1024


class PathParameters(ToolParameters):
    path: NonBlankStr


class ContentParameters(ToolParameters):
    path: NonBlankStr
    content: str | None = None


class TransferParameters(ToolParameters):
    source: NonBlankStr
    destination: NonBlankStr


def _full_path(path: str | Path) -> str:
    return os.path.abspath(os.path.expanduser(str(path)))


def _file_target(raw: str) -> Path:
    """Return the path of a file to write, rejecting directory-like paths."""
    path = Path(raw).expanduser()
    if raw.endswith(("/", os.sep)) or path.name in {"", ".", ".."}:
        raise ToolExecutionError(
            f"The filename part of the path '{raw}' is invalid or empty."
        )
    return path


def _timestamp(value: float) -> str:
    return format_timestamp(datetime.datetime.fromtimestamp(value))


def _write_text(raw: str, content: str, *, verb: str) -> tuple[Path, bool]:
    path = _file_target(raw)
    existed = path.is_file()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except PermissionError as exc:
        raise ToolExecutionError(
            f"Access denied. You do not have permission to {verb} the file at '{raw}'."
        ) from exc
    except IsADirectoryError as exc:
        raise ToolExecutionError(
            f"The path '{raw}' refers to a directory, not a file."
        ) from exc
    return path, existed


class CreateFileTool:
    name = "create_file"
    description = (
        "Creates a new text file with specified content. Parameters: 'path' "
        "(string, full path including filename, e.g. /home/user/notes.txt or "
        "relative path like my_folder/my_file.txt), 'content' (string). If the "
        "directory does not exist, it will be created. If 'content' is not "
        "provided, an empty file will be created."
    )
    needs_attached_process = False

    def execute(self, parameters: Mapping[str, Any]) -> str:
        params = validate_parameters(ContentParameters, parameters)
        path, _ = _write_text(params.path, params.content or "", verb="create")
        logger.debug("created file %s", path)
        return f"Successfully created file '{_full_path(path)}'."


class ReadFileContentTool:
    name = "read_file_content"
    description = (
        "Reads the content of a specified text file. Parameters: 'path' "
        "(string, full path to the file, e.g. /home/user/notes.txt or relative "
        "path like my_folder/my_file.txt). Returns the file content or an "
        "error message."
    )
    needs_attached_process = False

    def execute(self, parameters: Mapping[str, Any]) -> str:
        params = validate_parameters(PathParameters, parameters)
        path = _file_target(params.path)
        if not path.is_file():
            raise ToolExecutionError(f"File not found at '{params.path}'.")
        size = path.stat().st_size
        if size > MAX_READ_BYTES:
            raise ToolExecutionError(
                f"File '{params.path}' is too large to read "
                f"(max size: {MAX_READ_BYTES // (1024 * 1024)}MB). "
                f"Size: {size / (1024 * 1024):.2f}MB."
            )
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except PermissionError as exc:
            raise ToolExecutionError(
                "Access denied. You do not have permission to read the file "
                f"at '{params.path}'."
            ) from exc
        full = _full_path(path)
        if not content:
            return f"File '{full}' is empty."
        return f"Content of '{full}':\n{content}"


class WriteFileTool:
    name = "write_file"
    description = (
        "Writes or overwrites content to a file. Creates the file if it doesn't "
        "exist. Parameters: 'path' (string, full path including filename, e.g. "
        "/home/user/notes.txt or relative path like my_folder/my_file.txt), "
        "'content' (string, the content to write to the file). If the directory "
        "does not exist, it will be created."
    )
    needs_attached_process = False

    def execute(self, parameters: Mapping[str, Any]) -> str:
        params = validate_parameters(ContentParameters, parameters)
        path, existed = _write_text(params.path, params.content or "", verb="write to")
        action = "updated" if existed else "created"
        return f"Successfully {action} file '{_full_path(path)}'."


class ListDirectoryTool:
    name = "list_directory"
    description = (
        "Lists the contents of a directory (files and subdirectories). "
        "Parameters: 'path' (string, required - the directory path)."
    )
    needs_attached_process = False

    def execute(self, parameters: Mapping[str, Any]) -> str:
        params = validate_parameters(PathParameters, parameters)
        directory = Path(params.path).expanduser()
        if not directory.is_dir():
            raise ToolExecutionError(f"Directory not found: '{params.path}'.")
        try:
            entries = sorted(directory.iterdir(), key=lambda entry: entry.name)
        except PermissionError as exc:
            raise ToolExecutionError(
                f"Access denied to directory '{params.path}'."
            ) from exc

        lines = [f"Contents of '{_full_path(directory)}':", ""]
        dirs = [entry for entry in entries if entry.is_dir()]
        files = [entry for entry in entries if not entry.is_dir()]
        if not dirs and not files:
            lines.append("  (empty directory)")
            return "\n".join(lines)
        lines.extend(f"  📁 {entry.name}/" for entry in dirs)
        for entry in files:
            try:
                size = format_size(entry.stat().st_size)
            except OSError:
                size = "unknown size"
            lines.append(f"  📄 {entry.name}  ({size})")
        lines.append("")
        lines.append(f"Total: {len(dirs)} folder(s), {len(files)} file(s)")
        logger.debug(
            "listed %d dirs, %d files in %s", len(dirs), len(files), directory
        )
        return "\n".join(lines)


class CreateDirectoryTool:
    name = "create_directory"
    description = (
        "Creates a new directory (and any parent directories as needed). "
        "Parameters: 'path' (string, required - the directory path to create)."
    )
    needs_attached_process = False

    def execute(self, parameters: Mapping[str, Any]) -> str:
        params = validate_parameters(PathParameters, parameters)
        directory = Path(params.path).expanduser()
        if directory.is_dir():
            return f"Directory already exists: '{_full_path(directory)}'."
        try:
            directory.mkdir(parents=True)
        except PermissionError as exc:
            raise ToolExecutionError(
                f"Access denied creating directory '{params.path}'."
            ) from exc
        except FileExistsError as exc:
            raise ToolExecutionError(
                f"A file already exists at '{params.path}'."
            ) from exc
        return f"Successfully created directory '{_full_path(directory)}'."


def _prepare_destination(destination: Path, raw: str, *, message: str) -> None:
    if destination.exists():
        raise ToolExecutionError(message.format(destination=raw))
    destination.parent.mkdir(parents=True, exist_ok=True)


class MoveFileTool:
    name = "move_file"
    description = (
        "Moves or renames a file or directory. "
        "Parameters: 'source' (string, required), 'destination' (string, required)."
    )
    needs_attached_process = False

    def execute(self, parameters: Mapping[str, Any]) -> str:
        params = validate_parameters(TransferParameters, parameters)
        source = Path(params.source).expanduser()
        destination = Path(params.destination).expanduser()
        if not source.exists():
            raise ToolExecutionError(f"Source not found: '{params.source}'.")
        kind = "directory" if source.is_dir() else "file"
        try:
            _prepare_destination(
                destination,
                params.destination,
                message="Destination already exists: '{destination}'. Cannot overwrite.",
            )
            shutil.move(str(source), str(destination))
        except PermissionError as exc:
            raise ToolExecutionError(
                f"Access denied when trying to move '{params.source}'."
            ) from exc
        return (
            f"Successfully moved {kind} '{_full_path(source)}' "
            f"to '{_full_path(destination)}'."
        )


class CopyFileTool:
    name = "copy_file"
    description = (
        "Copies a file to a new location. "
        "Parameters: 'source' (string, required), 'destination' (string, required)."
    )
    needs_attached_process = False

    def execute(self, parameters: Mapping[str, Any]) -> str:
        params = validate_parameters(TransferParameters, parameters)
        source = Path(params.source).expanduser()
        destination = Path(params.destination).expanduser()
        if not source.is_file():
            raise ToolExecutionError(f"Source file not found: '{params.source}'.")
        try:
            _prepare_destination(
                destination,
                params.destination,
                message="Destination file already exists: '{destination}'.",
            )
            shutil.copy2(source, destination)
        except PermissionError as exc:
            raise ToolExecutionError(
                f"Access denied when trying to copy '{params.source}'."
            ) from exc
        return (
            f"Successfully copied '{_full_path(source)}' "
            f"to '{_full_path(destination)}'."
        )


class DeleteFileTool:
    name = "delete_file"
    description = (
        "Deletes a file or an empty directory. "
        "Parameters: 'path' (string, required - the path to delete)."
    )
    needs_attached_process = False

    def execute(self, parameters: Mapping[str, Any]) -> str:
        params = validate_parameters(PathParameters, parameters)
        target = Path(params.path).expanduser()
        try:
            if target.is_file() or target.is_symlink():
                target.unlink()
                return f"Successfully deleted file '{_full_path(target)}'."
            if target.is_dir():
                count = sum(1 for _ in target.iterdir())
                if count:
                    raise ToolExecutionError(
                        f"Directory '{params.path}' is not empty ({count} items). "
                        "Refusing to delete non-empty directory for safety."
                    )
                target.rmdir()
                return f"Successfully deleted empty directory '{_full_path(target)}'."
        except PermissionError as exc:
            raise ToolExecutionError(
                f"Access denied when trying to delete '{params.path}'."
            ) from exc
        raise ToolExecutionError(f"Path not found: '{params.path}'.")


class FileInfoTool:
    name = "get_file_info"
    description = (
        "Gets detailed information about a file or directory (size, dates, "
        "attributes). Parameters: 'path' (string, required)."
    )
    needs_attached_process = False

    def execute(self, parameters: Mapping[str, Any]) -> str:
        params = validate_parameters(PathParameters, parameters)
        target = Path(params.path).expanduser()
        if not target.exists():
            raise ToolExecutionError(f"Path not found: '{params.path}'.")
        try:
            info = target.stat()
        except PermissionError as exc:
            raise ToolExecutionError(f"Access denied for '{params.path}'.") from exc

        full = _full_path(target)
        if target.is_file():
            return "\n".join(
                [
                    f"File: {full}",
                    f"  Size: {format_size(info.st_size)} ({info.st_size:,} bytes)",
                    f"  Extension: {target.suffix}",
                    f"  Created: {_timestamp(info.st_ctime)}",
                    f"  Modified: {_timestamp(info.st_mtime)}",
                    f"  Accessed: {_timestamp(info.st_atime)}",
                    f"  Read-only: {not os.access(target, os.W_OK)}",
                    f"  Attributes: {stat.filemode(info.st_mode)}",
                ]
            )

        file_count = dir_count = total_size = 0
        try:
            for entry in target.iterdir():
                if entry.is_dir():
                    dir_count += 1
                else:
                    file_count += 1
                    total_size += entry.stat().st_size
        except PermissionError:
            logger.debug("cannot enumerate %s", target)
        return "\n".join(
            [
                f"Directory: {full}",
                f"  Created: {_timestamp(info.st_ctime)}",
                f"  Modified: {_timestamp(info.st_mtime)}",
                f"  Attributes: {stat.filemode(info.st_mode)}",
                f"  Contents: {dir_count} folder(s), {file_count} file(s)",
                f"  Top-level size: {format_size(total_size)}",
            ]
        )


FILE_TOOLS: tuple[type, ...] = (
    CreateFileTool,
    ReadFileContentTool,
    WriteFileTool,
    ListDirectoryTool,
    CreateDirectoryTool,
    MoveFileTool,
    CopyFileTool,
    DeleteFileTool,
    FileInfoTool,
)
