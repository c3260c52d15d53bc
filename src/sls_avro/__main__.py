import sys

from sls_avro.cli import main

if __name__ == "__main__":
    sys.exit(main())
