"""Tests for the top-level package exports."""

from __future__ import annotations

import docshare
import docshare.fs


class TestPublicAPI:
    def test_version(self) -> None:
        assert docshare.__version__ == "0.1.0"

    def test_all_names_resolve(self) -> None:
        for name in docshare.__all__:
            assert hasattr(docshare, name), name
        for name in docshare.fs.__all__:
            assert hasattr(docshare.fs, name), name

    def test_exceptions_share_a_base(self) -> None:
        for exc in (
            docshare.AccessDeniedError,
            docshare.AuthenticationRequiredError,
            docshare.FileTooLargeError,
            docshare.MenuStateError,
            docshare.RecordNotFoundError,
            docshare.StorageError,
        ):
            assert issubclass(exc, docshare.DocShareError)
