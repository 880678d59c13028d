"""AWS EC2 backend: boto3 client wrapper and normalized resource models."""
