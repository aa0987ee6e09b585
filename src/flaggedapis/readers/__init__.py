# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Input readers for the flagged API checker."""

from flaggedapis.readers.api_versions import ApiVersionsReader
from flaggedapis.readers.flag_values import FlagValuesReader
from flaggedapis.readers.signature import ApiSignatureReader

__all__ = ["ApiSignatureReader", "ApiVersionsReader", "FlagValuesReader"]
