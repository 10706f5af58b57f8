# puffer_sdk/__main__.py
# SPDX-License-Identifier: Apache-2.0

import sys

from puffer_sdk.cli import main

sys.exit(main())
