"""nginx-digest: rank the request URIs behind HTTP errors in nginx access logs."""

import sys

from nginx_digest.cli import main


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(0)
    except BrokenPipeError:
        sys.exit(0)
