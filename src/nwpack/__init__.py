"""nwpack - Package NW.js applications into branded, OS-native bundles."""

from .context import BuildContext as BuildContext
from .errors import BundleError as BundleError
from .errors import BundleIOError as BundleIOError
from .errors import DownloadError as DownloadError
from .errors import ExternalProcessError as ExternalProcessError
from .errors import NotFoundError as NotFoundError
from .errors import ParseError as ParseError
from .errors import UnresolvedVersionError as UnresolvedVersionError
from .errors import UnsupportedPlatformError as UnsupportedPlatformError
from .manifest import Manifest as Manifest
from .orchestrator import BuildOrchestrator as BuildOrchestrator
from .pipeline import Pipeline as Pipeline
from .pipeline import build_bundle as build_bundle
from .platforms import PlatformProfile as PlatformProfile
from .providers import LocalBinaryProvider as LocalBinaryProvider
from .providers import LocalCodecProvider as LocalCodecProvider
from .providers import SpecVersionResolver as SpecVersionResolver
from .request import BuildOptions as BuildOptions
from .request import BuildRequest as BuildRequest
from .request import CodecPolicy as CodecPolicy
from .run import RunOptions as RunOptions
from .run import RunPipeline as RunPipeline
from .stage import Stage as Stage
from .stage import stage as stage
from .stageops import Optional as Optional
from .stageops import Required as Required
from .stageops import StageOp as StageOp
from .targets import Target as Target
from .workspace import Workspace as Workspace
