"""
vopt: batch video normalization.

Every video in a folder is inspected and either downscaled and/or bitrate-capped
with ffmpeg, or copied unchanged, into an output folder. A ledger in the input
folder remembers finished files so reruns are incremental.
"""
