class Globals:
    ARCHIVE_ENDING = ".tar.gz"
    DEFAULT_CONFIG_FILE = "config.yaml"
    DEFAULT_CONFIG_DIRS = [".", "~/.config/homeferry", "/etc/homeferry"]
    DEFAULT_MOUNT_POINT = "/Volumes/storage1"
    DEFAULT_MOUNT_HINT = "mount -t smbfs -o guest smb://192.168.10.4/storage1 /Volumes/storage1"
    DEFAULT_GROUP = "staff"
    HOME_ENV_VAR = "HOMEFERRY_HOME"
    EXPECTED_FIRST_UID = 501
    CONFLICT_LIMIT = 5
    PREVIEW_LIMIT = 10
