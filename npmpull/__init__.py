"""
npm-pull: fetch the latest published version of a registry package and
unpack it into a local directory.

This package is organised as:
* core     - configuration from the environment.
* domain   - pydantic models, errors and archive path rules.
* services - the registry client and the tarball downloader/extractor.
"""
