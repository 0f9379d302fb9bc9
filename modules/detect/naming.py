"""Instance naming for probed sources."""


def pretty_instance_name(owner_name: str, factory_name: str) -> str:
    """Build the name of a source created on behalf of an auto source.

    A trailing "src" and a leading "gst" are stripped from the factory name,
    so "v4l2src" probed by "autovideosrc0" becomes
    "autovideosrc0-actual-src-v4l2".
    """
    marker = factory_name
    if marker.endswith("src"):
        marker = marker[:-len("src")]
    if marker.startswith("gst"):
        marker = marker[len("gst"):]
    return f"{owner_name}-actual-src-{marker}"
