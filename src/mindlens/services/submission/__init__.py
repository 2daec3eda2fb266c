"""Submission services package."""

from mindlens.services.submission.pipeline import EncryptedSubmissionPipeline
from mindlens.services.submission.deidentify import build_deidentified_record

__all__ = [
    "EncryptedSubmissionPipeline",
    "build_deidentified_record",
]
