"""
YAML document store with per-document versions.

Documents live in <data_dir>/<collection>/<doc_id>.yaml as
{'version': n, 'data': {...}}. All writes happen under one FileLock so a
read-modify-write of a document (e.g. a whole schedule when one match score
changes) cannot interleave with another writer.
"""
import logging
import os
import re
import tempfile
from typing import Callable, List, Optional, Tuple

import yaml
from filelock import FileLock

from bracket.errors import DocumentNotFound, VersionConflict

logger = logging.getLogger(__name__)

_DOC_ID_RE = re.compile(r'^[A-Za-z0-9][A-Za-z0-9_.-]*$')


class DocumentStore:
    def __init__(self, data_dir: str, lock_timeout: float = 10):
        self.data_dir = data_dir
        os.makedirs(data_dir, exist_ok=True)
        self.lock = FileLock(os.path.join(data_dir, '.lock'), timeout=lock_timeout)

    def _path(self, collection: str, doc_id: str) -> str:
        for part in (collection, doc_id):
            if not isinstance(part, str) or not _DOC_ID_RE.match(part) or '..' in part:
                raise ValueError(f"Invalid document identifier: {part!r}")
        return os.path.join(self.data_dir, collection, f"{doc_id}.yaml")

    def _read(self, path: str) -> Tuple[Optional[dict], int]:
        if not os.path.exists(path):
            return None, 0
        with open(path, 'r', encoding='utf-8') as f:
            raw = yaml.safe_load(f)
        if not raw:
            return None, 0
        return raw.get('data'), raw.get('version', 0)

    def _write(self, path: str, data: dict, version: int):
        directory = os.path.dirname(path)
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                yaml.safe_dump({'version': version, 'data': data}, f, default_flow_style=False,
                               sort_keys=False)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def get(self, collection: str, doc_id: str) -> Tuple[Optional[dict], int]:
        """Return (data, version), or (None, 0) if the document does not exist."""
        path = self._path(collection, doc_id)
        with self.lock:
            return self._read(path)

    def list(self, collection: str) -> List[dict]:
        """Return every readable document in a collection, ordered by id."""
        directory = os.path.join(self.data_dir, collection)
        if not os.path.isdir(directory):
            return []
        documents = []
        with self.lock:
            for filename in sorted(os.listdir(directory)):
                if not filename.endswith('.yaml'):
                    continue
                path = os.path.join(directory, filename)
                try:
                    data, _ = self._read(path)
                except yaml.YAMLError as e:
                    logger.warning(f'Failed to parse {path}: {e}')
                    continue
                if data is not None:
                    documents.append(data)
        return documents

    def put(self, collection: str, doc_id: str, data: dict, expected_version: int) -> int:
        """
        Write a document if its stored version is still expected_version.

        expected_version=0 means the document must not exist yet. Returns the
        new version; raises VersionConflict if someone else wrote first.
        """
        path = self._path(collection, doc_id)
        with self.lock:
            _, current = self._read(path)
            if current != expected_version:
                logger.warning(f'Version conflict on {collection}/{doc_id}: '
                               f'expected {expected_version}, found {current}')
                raise VersionConflict(
                    f"{collection}/{doc_id} was modified concurrently "
                    f"(expected version {expected_version}, found {current})")
            self._write(path, data, current + 1)
            return current + 1

    def update(self, collection: str, doc_id: str, mutate: Callable[[dict], dict],
               expected_version: Optional[int] = None) -> Tuple[dict, int]:
        """
        Read-modify-write a document under the lock.

        mutate receives the stored data and returns the replacement. If it
        raises, nothing is written. Returns (new_data, new_version).
        """
        path = self._path(collection, doc_id)
        with self.lock:
            data, current = self._read(path)
            if data is None:
                raise DocumentNotFound(f"{collection}/{doc_id} not found")
            if expected_version is not None and current != expected_version:
                logger.warning(f'Version conflict on {collection}/{doc_id}: '
                               f'expected {expected_version}, found {current}')
                raise VersionConflict(
                    f"{collection}/{doc_id} was modified concurrently "
                    f"(expected version {expected_version}, found {current})")
            new_data = mutate(data)
            self._write(path, new_data, current + 1)
            return new_data, current + 1

    def delete(self, collection: str, doc_id: str) -> bool:
        path = self._path(collection, doc_id)
        with self.lock:
            if not os.path.exists(path):
                return False
            os.remove(path)
            return True
