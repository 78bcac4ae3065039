"""
Collects the Mule XML configuration files of an application.

Sources can be a Mule project directory (its `src/main/mule` folder is used
when present) or a deployable archive (`.jar` / `.zip`). In both cases the
result is a mapping of forward-slash file path to XML text, restricted to
`.xml` files outside any `META-INF/` directory. The artifact name shown in
diagram titles is read from the Maven `pom.xml`.
"""
import logging
import os
import zipfile
from typing import Dict, Iterable, Optional, Tuple

from lxml import etree

logger = logging.getLogger(__name__)

MAVEN_POM_NAMESPACE = "http://maven.apache.org/POM/4.0.0"
METADATA_SEGMENT = "meta-inf/"
ARCHIVE_EXTENSIONS = (".jar", ".zip")


def normalize_path(file_path: str) -> str:
    return file_path.replace("\\", "/")


def is_relevant_xml_path(file_path: str) -> bool:
    lowered = normalize_path(file_path).lower()
    if not lowered.endswith(".xml"):
        return False
    return not (lowered.startswith(METADATA_SEGMENT) or f"/{METADATA_SEGMENT}" in lowered)


def select_relevant_xml_entries(entries: Iterable[Tuple[str, str]]) -> Dict[str, str]:
    """
    Keeps the Mule configuration candidates among (path, content) entries.

    Args:
        entries (Iterable[Tuple[str, str]]): File paths with their text content.

    Returns:
        Dict[str, str]: Paths normalized to forward slashes, mapped to content,
        for `.xml` files outside any `META-INF/` segment.
    """
    filtered: Dict[str, str] = {}
    for file_path, content in entries:
        if is_relevant_xml_path(file_path):
            filtered[normalize_path(file_path)] = content
    return filtered


def is_archive(source_path: str) -> bool:
    return os.path.isfile(source_path) and source_path.lower().endswith(ARCHIVE_EXTENSIONS)


def collect_xml_from_directory(project_dir: str) -> Dict[str, str]:
    """
    Reads the Mule XML files of a project directory.

    Uses `<project_dir>/src/main/mule` when it exists, otherwise walks
    `project_dir` itself. Paths in the result are relative to the project
    directory. Files that cannot be read are logged and skipped.

    Args:
        project_dir (str): Path to the Mule project (or directly to its XML folder).

    Returns:
        Dict[str, str]: Relative path mapped to XML text.

    Raises:
        FileNotFoundError: If `project_dir` is not a directory.
    """
    if not os.path.isdir(project_dir):
        logger.error(f"Project directory does not exist: {project_dir}")
        raise FileNotFoundError(f"Project directory does not exist: {project_dir}")

    mule_dir = os.path.join(project_dir, 'src', 'main', 'mule')
    scan_root = mule_dir if os.path.isdir(mule_dir) else project_dir
    logger.info(f"Scanning directory {scan_root} for Mule XML files.")

    entries = []
    for root_dir, _, files in os.walk(scan_root):
        for file in sorted(files):
            if not file.lower().endswith('.xml'):
                continue
            file_path = os.path.join(root_dir, file)
            relative_path = os.path.relpath(file_path, project_dir)
            try:
                with open(file_path, 'r', encoding='utf-8') as f:
                    entries.append((relative_path, f.read()))
            except (OSError, UnicodeDecodeError) as e:
                logger.error(f"Failed to read {file_path}: {e}")

    files = select_relevant_xml_entries(entries)
    if not files:
        logger.warning(f"No XML files found in {scan_root}.")
    return files


def collect_xml_from_archive(archive_path: str) -> Dict[str, str]:
    """
    Reads the Mule XML files packaged in a deployable JAR or ZIP.

    Raises:
        FileNotFoundError: If the archive does not exist.
        zipfile.BadZipFile: If the file is not a valid archive.
    """
    logger.info(f"Reading Mule XML files from archive {archive_path}")
    entries = []
    with zipfile.ZipFile(archive_path) as archive:
        for info in archive.infolist():
            if info.is_dir() or not is_relevant_xml_path(info.filename):
                continue
            data = archive.read(info.filename)
            entries.append((info.filename, data.decode('utf-8', errors='replace')))
    return select_relevant_xml_entries(entries)


def collect_xml_files(source_path: str) -> Dict[str, str]:
    """Reads Mule XML files from a project directory or a `.jar`/`.zip` archive."""
    if is_archive(source_path):
        return collect_xml_from_archive(source_path)
    return collect_xml_from_directory(source_path)


def parse_artifact_name(pom_content: bytes) -> Optional[str]:
    """
    Extracts the artifact name from Maven POM content.

    Prefers `<name>` over `<artifactId>`; both are looked up directly under
    `<project>`, with or without the Maven namespace.

    Returns:
        Optional[str]: The name, or None when the POM is invalid or declares neither.
    """
    try:
        root = etree.fromstring(pom_content)
    except etree.XMLSyntaxError as e:
        logger.error(f"Error parsing pom.xml: {e}")
        return None

    for tag in ("name", "artifactId"):
        for path in (f"{{{MAVEN_POM_NAMESPACE}}}{tag}", tag):
            element = root.find(path)
            if element is not None and element.text and element.text.strip():
                return element.text.strip()
    return None


def read_artifact_name(source_path: str) -> Optional[str]:
    """
    Reads the artifact name of a project directory or archive from its pom.xml.

    In archives the POM lives under `META-INF/maven/<group>/<artifact>/pom.xml`.
    Returns None when no readable POM is found.
    """
    if is_archive(source_path):
        try:
            with zipfile.ZipFile(source_path) as archive:
                for name in archive.namelist():
                    if name.lower().startswith("meta-inf/maven/") and name.endswith("/pom.xml"):
                        return parse_artifact_name(archive.read(name))
        except zipfile.BadZipFile as e:
            logger.error(f"Cannot read pom.xml from {source_path}: {e}")
        return None

    pom_path = os.path.join(source_path, 'pom.xml')
    if not os.path.isfile(pom_path):
        logger.debug(f"No pom.xml found in {source_path}")
        return None
    try:
        with open(pom_path, 'rb') as f:
            content = f.read()
    except OSError as e:
        logger.error(f"Failed to read {pom_path}: {e}")
        return None
    return parse_artifact_name(content)
