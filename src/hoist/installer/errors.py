# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/installer/errors.py

from __future__ import annotations

from typing import Optional


class InstallerError(RuntimeError):
    """
    Base class for fatal installer failures.

    Every error carries the stage it happened in and the underlying cause.
    Nothing in the installer retries or rolls back: infrastructure created
    before the failure stays live until an explicit `hoist uninstall`.
    """

    stage = "install"

    def __init__(self, cause: object, *, stage: Optional[str] = None):
        self.cause = cause
        if stage is not None:
            self.stage = stage
        super().__init__(f"{self.stage}: {cause}")


class ConfigError(InstallerError):
    stage = "config"


class PreflightError(InstallerError):
    stage = "pre-install checks"


class ProvisionError(InstallerError):
    stage = "provision"


class ClusterError(InstallerError):
    stage = "cluster"


class ComponentInstallError(InstallerError):
    stage = "install"

    def __init__(self, component: str, cause: object):
        self.component = component
        super().__init__(f"error installing {component}: {cause}")


class BootstrapError(InstallerError):
    stage = "bootstrap"


class RegistrationError(InstallerError):
    stage = "register"
