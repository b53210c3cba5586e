"""
This package contains the batch pipeline of vopt.

The pipeline orchestrates a whole run: discovering files, consulting the
progress ledger, and coordinating the probe, planning and transcode services
for each file in turn.
"""
