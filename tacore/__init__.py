"""
Technical-analysis rule core.

Provides unified interfaces for:
- Numeric representation (float or arbitrary-precision decimal)
- Incrementally cached indicators over a bar series
- A composable rule algebra (boolean, threshold, stateful, stop, calendar)
- A descriptor codec that turns rule graphs into portable trees and back
- YAML strategy files built on top of the descriptor codec
"""
