"""
Features package — each sub-package encapsulates a self-contained feature.

Convention:
  features/<feature_name>/
    __init__.py      public API re-exports
    models.py        data models specific to this feature
    tracker.py       runtime aggregation / state tracking (if applicable)
    ...              any other feature-specific modules

Current features:
  activity         classification and monitoring of the pipeline event stream
"""
