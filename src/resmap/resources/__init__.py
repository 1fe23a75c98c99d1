# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""Resource attribute access."""

from __future__ import annotations

from resmap.resources.attributes import AttributeView, as_attribute_view, render_value

__all__ = ["AttributeView", "as_attribute_view", "render_value"]
