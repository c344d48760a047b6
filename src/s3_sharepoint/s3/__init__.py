"""S3-shaped operations built on top of the Graph catalog."""
