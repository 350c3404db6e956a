from indexable.models.document import DocumentDescriptor, HitProvenance
from indexable.models.params import ParamOptions

__all__ = ["DocumentDescriptor", "HitProvenance", "ParamOptions"]
