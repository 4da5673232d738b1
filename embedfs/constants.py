import struct
import tarfile


# Magic and version
SIGNATURE = b"EMBEDFS~000:"  # 12 bytes: "EMBEDFS~" + format version "000:"
SIGNATURE_LEN = len(SIGNATURE)

# Trailer layout (big endian): signature[12], archive_offset i64
TRAILER_STRUCT = struct.Struct(">12sq")
TRAILER_SIZE = TRAILER_STRUCT.size  # 20

# PAX writes plain ustar headers for members that fit ustar limits and only
# emits extended headers for long or non-ASCII names.
TAR_FORMAT = tarfile.PAX_FORMAT
TAR_ENCODING = "utf-8"

# Mode applied by the CLI to containers it produces
OUTPUT_MODE = 0o700

# Chunk size used when streaming entries to stdout
COPY_CHUNK_SIZE = 64 * 1024
