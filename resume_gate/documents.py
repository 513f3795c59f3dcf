# resume_gate/documents.py

import mimetypes
import os
from collections import namedtuple

from resume_gate.errors import DocumentError

Document = namedtuple("Document", ["data", "filename", "mimetype"])


class DocumentStore:
    """Serves the one static document a deployment is configured with."""

    def __init__(self, directory: str, default_name: str):
        self.directory = directory
        self.default_name = default_name

    def path_for(self, name: str) -> str:
        # Only bare file names; the document is never chosen per request.
        return os.path.join(self.directory, os.path.basename(name))

    def fetch(self, name=None) -> Document:
        name = name or self.default_name
        path = self.path_for(name)
        try:
            with open(path, "rb") as fh:
                data = fh.read()
        except OSError as exc:
            raise DocumentError(f"Cannot read document {name}") from exc
        mimetype = mimetypes.guess_type(name)[0] or "application/octet-stream"
        return Document(data=data, filename=os.path.basename(name), mimetype=mimetype)
