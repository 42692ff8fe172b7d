"""assetseal: content-addressed, AES-256-GCM sealed assets for public CDNs.

Each plaintext file is compressed (DEFLATE), encrypted with AES-256-GCM under
a single provisioned key, and written as ``nonce || ciphertext || tag`` under
a name derived from the SHA-256 of its plaintext.  A JSON manifest lists every
sealed asset; failed files go to a separate failure report.
"""

__version__ = "1.0.0"
__description__ = (
    "Compress, encrypt, and content-address documents for CDN distribution"
)

from assetseal.core.pipeline import SealPipeline
from assetseal.core.transformer import AssetTransformer
from assetseal.cli.app import app as cli

__all__ = ["SealPipeline", "AssetTransformer", "cli", "__version__"]
