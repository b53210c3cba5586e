"""
This package contains the core domain models and decision logic of vopt.

The domain layer holds the rules that decide what happens to a video, kept free
of any process invocation or filesystem access so they can be tested directly.

Modules:
    exceptions.py: The error taxonomy used across the pipeline.
    media.py: Immutable value types (`MediaProbe`, `OrientedDimensions`,
              `TransformPlan`) and the per-batch records.
    orientation.py: Rotation correction and orientation classification.
    planner.py: The deterministic resize / bitrate-cap decision.
"""
