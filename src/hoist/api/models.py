# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/api/models.py

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class HostRecord(BaseModel):
    """A host as the platform API stores it."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    driver_name: str = Field("", alias="driverName")
    driver: Dict[str, Any] = Field(default_factory=dict)
    ssh_private_key: str = Field("", alias="sshPrivateKey")
    ca_cert: Optional[str] = Field(None, alias="caCert")
    ca_private_key: Optional[str] = Field(None, alias="caPrivateKey")


class Target(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    url: str
    token: str = ""
