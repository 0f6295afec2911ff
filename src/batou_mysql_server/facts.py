class RunFacts:
    """Facts collected while converging one host.

    Filled incrementally by the workflow phases and never reset during a
    run. Flags default to false until the step establishing them has run.
    """

    def __init__(self):
        self.credential_file_exists = False
        self.root_password = None
        self.installed_versions = []
        self.available_versions = []
        self.package_installed = False
        self.install_outcome = None
        self.target_data_dir = ""
        self.default_data_dir_exists = False
        self.config_file_exists = {}
        self.apparmor_edited = False
        self.unit_file_edited = False
        self.relocation_outcome = None
        self.auxiliary_installed = []
        self.users = ""

    def as_dict(self, include_secrets=False):
        result = {}
        for name, value in vars(self).items():
            if name == "root_password" and not include_secrets:
                value = "********" if value else None
            elif hasattr(value, "value"):
                value = value.value
            result[name] = value
        return result
