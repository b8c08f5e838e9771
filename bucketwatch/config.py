from dataclasses import dataclass


@dataclass(frozen=True, kw_only=True)
class ClientConfig:
    """Connection settings for an S3-compatible endpoint.

    Profile and region are optional overrides. When not specified, bucketwatch follows
    the standard AWS credential and region resolution chain through boto3.

    ## Credentials

    Requests are signed with SigV4 whenever boto3 finds credentials:

    1. **Environment variables**: AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY and the
       optional AWS_SESSION_TOKEN
    2. **Shared files**: ~/.aws/credentials and ~/.aws/config for the selected profile
    3. **IAM role credentials** when running inside AWS

    Without credentials requests are sent anonymously, which works for buckets
    that allow public listening.

    ## Region Selection

    1. Explicit `region` parameter (this config)
    2. AWS_REGION or AWS_DEFAULT_REGION environment variable
    3. Region from the selected profile in ~/.aws/config
    4. `DEFAULT_REGION` ("us-east-1")

    ## Examples

    Local MinIO server:
    ```python
    ClientConfig(endpoint="localhost:9000", secure=False)
    ```

    Named profile against AWS:
    ```python
    ClientConfig(endpoint="s3.eu-west-1.amazonaws.com", profile="prod", region="eu-west-1")
    ```
    """

    endpoint: str
    region: str | None = None
    profile: str | None = None
    secure: bool = True
    verify: bool = True

    @property
    def base_url(self) -> str:
        """Endpoint with scheme and without trailing slash."""
        endpoint = self.endpoint.rstrip("/")
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        scheme = "https" if self.secure else "http"
        return f"{scheme}://{endpoint}"
