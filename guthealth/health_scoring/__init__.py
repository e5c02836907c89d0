"""Bowel-health scoring package.

This module contains:
- The pure score calculator and the score -> level policy
- Trend and distribution reductions over stored scores
- Advice generation from recent scores
- The score repository and the service that ties them to records
"""

from .models import HealthScore
