"""Backend client handles passed into storage entries."""
import typing as t
import boto3
import zirconium as zr
import zrlog
from autoinject import injector
from .s3 import wrap_s3_errors


_S3_CLIENT_KEYS = (
    "region_name",
    "endpoint_url",
    "profile_name",
    "aws_access_key_id",
    "aws_secret_access_key",
    "aws_session_token",
)


@injector.injectable_global
class StorageClients:
    """Holds one client per backend family.

        Entries are given the client, they never build one. The S3 client is
        only built when [treestore.s3] enabled is set in the configuration or
        when s3_initialize() is called; otherwise it stays None and any S3
        operation fails with BackendUnavailableError.
    """

    config: zr.ApplicationConfig = None

    @injector.construct
    def __init__(self):
        self._log = zrlog.get_logger("treestore.clients")
        self.s3 = None
        if self.config.as_bool(("treestore", "s3", "enabled"), default=False):
            s3_config = self.config.as_dict(("treestore", "s3"), default={})
            self.s3_initialize(**{k: s3_config[k] for k in _S3_CLIENT_KEYS if s3_config.get(k)})

    @wrap_s3_errors
    def s3_initialize(self,
                      region_name: t.Optional[str] = None,
                      endpoint_url: t.Optional[str] = None,
                      profile_name: t.Optional[str] = None,
                      aws_access_key_id: t.Optional[str] = None,
                      aws_secret_access_key: t.Optional[str] = None,
                      aws_session_token: t.Optional[str] = None):
        """Build the S3 client.

            With no arguments, boto3's default credential chain is used. A
            profile name or an explicit key pair (optionally with a session
            token) can be given instead. endpoint_url allows S3-compatible
            services.
        """
        session = boto3.session.Session(
            profile_name=profile_name,
            aws_access_key_id=aws_access_key_id,
            aws_secret_access_key=aws_secret_access_key,
            aws_session_token=aws_session_token,
            region_name=region_name,
        )
        self.s3 = session.client("s3", endpoint_url=endpoint_url)
        self._log.info(f"S3 client initialized [region={session.region_name}, endpoint={endpoint_url or 'default'}]")
        return self.s3

    def close(self):
        self.s3 = None
