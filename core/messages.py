"""Centralized error and log message templates for the pipeline."""


class ErrorMessages:
    """Centralized error message templates."""

    # Platform / manifest errors
    PLATFORM_UNSUPPORTED = "Unsupported platform: {platform}"
    ARCH_UNSUPPORTED = "Unsupported architecture: {arch}"
    MANIFEST_NOT_FOUND = "Asset manifest not found: {path}"
    MANIFEST_INVALID = "Invalid asset manifest: {error}"
    MANIFEST_DEPENDENCY_UNRESOLVED = (
        "Dependency '{dependency}' of '{asset}' has no descriptor on {platform}"
    )

    # Provisioning errors
    COMPONENTS_EMPTY = (
        "Invalid input: components should be a non-empty list of component names."
    )
    COMPONENT_UNKNOWN = "Unknown component '{component}'. Known components: {known}"
    COMPONENT_NO_FILES = 'No files found for component "{component}" on {platform} ({arch})'

    # Model errors
    MODEL_INVALID_NAME = "Invalid model: {name}. Valid models: {valid_models}"
    MODEL_DOWNLOAD_FAILED = "Failed to download ggml model {model}: {error}"

    # Download errors
    HTTP_DOWNLOAD_FAILED = "Failed to download {url}: HTTP {status_code}"
    HTTP_TRANSPORT_FAILED = "Failed to download {url}: {error}"
    HTTP_FILE_TOO_LARGE = "File too large (streamed): > {max}MB"

    # Audio errors
    AUDIO_FILE_NOT_FOUND = "Input file '{path}' not found."
    CONVERTER_NOT_INSTALLED = "FFmpeg or ffprobe is not installed."
    CONVERT_FAILED = (
        "Failed to convert '{path}' to the desired sample rate: {error}"
    )
    TRANSCODE_FAILED = "Failed to convert to WAV: {stderr}"
    RESAMPLE_FAILED = "Failed to convert '{path}' to the desired sample rate: {stderr}"
    PROBE_FAILED = "Failed to get sample rate: {stderr}"
    PROBE_PARSE_FAILED = "Failed to parse ffprobe output: {output!r}"

    # Engine errors
    ENGINE_NOT_FOUND = "Whisper executable not found: {path}"
    ENGINE_FAILED = "Whisper process failed with code {code}. stderr: {stderr}"
    ENGINE_TIMEOUT = "Whisper process timed out after {timeout}s. stderr: {stderr}"
    OUTPUT_JSON_FAILED = "Failed to read or parse JSON output file: {error}"
    OUTPUT_TEXT_FAILED = "Failed to read {format} output file: {error}"

    # Subprocess errors
    PROCESS_START_FAILED = "Failed to start {program}: {error}"
    PROCESS_TIMEOUT = "{program} timed out after {timeout}s"


class LogMessages:
    """Centralized log message templates."""

    # Provisioning
    PROVISION_START = "Provisioning {components} for {platform} ({arch}) into {dest}"
    ASSET_EXISTS = "File {filename} already exists at {path}, skipping download."
    ASSET_DOWNLOADED = "Downloaded {filename} to {path}"
    ASSET_FAILED = "Failed to download {filename}: {error}"
    DEPENDENCY_EXISTS = (
        "Dependency {filename} already exists at {path}, skipping download."
    )
    DEPENDENCY_DOWNLOADED = "Downloaded dependency {filename} to {path}"
    DEPENDENCY_FAILED = "Failed to download dependency {filename}: {error}"
    PROVISION_DONE = (
        "Provisioning finished: success={success}, files={files}, "
        "dependencies={dependencies}, failed={failed}"
    )

    # Linker path
    LIBRARY_PATH_PRESENT = "{variable} already contains {path}"
    LIBRARY_PATH_UPDATED = "{variable} set to: {value}"
    PROFILE_UPDATED = "{variable} updated in {profile}"
    PROFILE_UPDATE_FAILED = (
        "Error setting {variable} in {profile}: {error} "
        "(set in current process only)"
    )

    # Model download
    MODEL_EXISTS = "Model {model} already exists. Skipping download."
    MODEL_DOWNLOADING = "Downloading ggml model {model} from '{url}'..."
    MODEL_READY = "Done! Model '{model}' saved in '{path}'"
    MODEL_BATCH_DONE = "{ready}/{total} models ready"

    # HTTP download
    HTTP_DOWNLOADING = "Downloading from: {url}"
    HTTP_DOWNLOADED = "Downloaded {size:.2f}MB to {destination}"

    # Normalization
    AUDIO_ALREADY_CANONICAL = (
        "Input file '{path}' is already at the desired sample rate."
    )
    AUDIO_CONVERTED_CANONICAL = (
        "Input file '{path}' converted to WAV format with the desired sample rate."
    )
    AUDIO_RESAMPLED = (
        "File '{path}' successfully converted to '{output}' with sample rate {rate} Hz."
    )

    # Engine
    ENGINE_COMPLETED = "Whisper process completed successfully."
    ENGINE_COMMAND = "Running whisper: {command}"

    # Pipeline
    STAGE_TRANSITION = "Pipeline stage: {previous} -> {current}"
    STAGE_FAILED = "Pipeline failed at stage {stage}: {message}"
