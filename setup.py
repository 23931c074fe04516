from setuptools import setup, find_packages

setup(
    name="homeferry",
    version="0.1.0",
    description="HomeFerry moves shell configs, credentials, work directories and application settings from one Mac to another through a network share.",
    author="Dominik Püllen",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=["pyyaml",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "backup-migration=homeferry.main:backup_migration",
            "restore-migration=homeferry.main:restore_migration",
            "backup-user-dirs=homeferry.main:backup_user_dirs",
            "restore-user-dirs=homeferry.main:restore_user_dirs",
            "backup-work-dirs=homeferry.main:backup_work_dirs",
            "restore-work-dirs=homeferry.main:restore_work_dirs",
            "backup-app-config=homeferry.main:backup_app_config",
            "restore-app-config=homeferry.main:restore_app_config",
        ],
    },
    python_requires=">=3.10",
)
