"""Top-level package for sird-sim.

Code lives under `src/` following the cookiecutter-data-science layout.
The simulator (validation, integration, results, history) lives under
`src.sird`; plotting helpers live under `src.visualization`.
"""

# Package marker; keep this module lightweight.
