# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations


class DocpupError(Exception):
    """Base class for errors raised by docpup."""


class ConfigError(DocpupError):
    """
    Configuration could not be found, parsed or validated, or selected no repos.
    Fatal: raised before any repository is processed.
    """


class PreprocessError(DocpupError, RuntimeError):
    """A preprocess step (sphinx or html) failed for one repository."""


class CheckoutError(DocpupError):
    """Remote content could not be fetched for one repository."""
