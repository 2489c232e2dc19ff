# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""SmartSpend: personal expense tracking with owner-scoped records and an offline-tolerant client."""

__version__ = "0.1.0"
