"""Allow ``python -m noise_vectors``."""

from noise_vectors.cli import main

raise SystemExit(main())
