from richlog.reassembly.fragments import CompletedItem, FragmentBuffer
from richlog.reassembly.reassembler import Reassembler, reassemble

__all__ = ["CompletedItem", "FragmentBuffer", "Reassembler", "reassemble"]
