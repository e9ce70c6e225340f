# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Web subsystem configuration properties."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from corsfly.core.config import config_properties


@config_properties(prefix="corsfly.web")
@dataclass
class WebProperties:
    """Configuration for the web subsystem (corsfly.web.*).

    ``cors`` holds the raw CORS options exactly as written in the config
    file: absent, a boolean, or a mapping. It is normalized by
    :func:`corsfly.web.cors.validate_cors_options` when the app is built.
    """

    debug: bool = False
    cors: bool | dict[str, Any] | None = None
