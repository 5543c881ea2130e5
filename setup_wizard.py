import os
from pathlib import Path
import getpass


def prompt(question: str, default: str = None, secret: bool = False) -> str:
    if default:
        prompt_text = f"{question} [{default}]: "
    else:
        prompt_text = f"{question}: "
    if secret:
        value = getpass.getpass(prompt_text)
    else:
        value = input(prompt_text)
    return value.strip() or default or ""


def main():
    print("=== iLO Admin Setup Wizard ===")
    base_dir = Path.cwd()
    ilo_user = prompt("iLO username", "Administrator")
    ilo_pass = prompt("iLO password (leave empty to be asked every run)", secret=True)
    hosts_file = prompt("Hosts file", str(base_dir / "ilo_hosts.yaml"))
    verify_tls = prompt("Validate iLO certificates (true/false)", "false").lower()
    timeout = prompt("Request timeout in seconds", "30")
    log_path = prompt("Log file path", str(base_dir / "ilo_admin.log"))
    db_path = prompt("History database path", str(base_dir / "ilo_admin.sqlite"))
    record = prompt("Record every run in history (true/false)", "false").lower()
    test_host = prompt("iLO address to test the connection (optional)")

    env_lines = [
        f"ILO_USER={ilo_user}",
        f"ILO_HOSTS_FILE={hosts_file}",
        f"ILO_VERIFY_TLS={verify_tls}",
        f"ILO_TIMEOUT={timeout}",
        f"ILO_LOG_PATH={log_path}",
        f"ILO_DB_PATH={db_path}",
        f"ILO_RECORD_HISTORY={record}",
    ]
    if ilo_pass:
        env_lines.append(f"ILO_PASS={ilo_pass}")

    with open(".env", "w") as f:
        f.write("\n".join(env_lines))
    print("Configuration saved to .env")

    for line in env_lines:
        key, val = line.split("=", 1)
        os.environ[key] = val

    if test_host:
        print(f"Testing connection to {test_host}...")
        import validators
        password = ilo_pass or prompt("iLO password for the test", secret=True)
        if validators.validate_ilo_connection(test_host, ilo_user, password, verify=verify_tls == "true"):
            print("iLO connection successful.")
        else:
            print("WARNING: Could not open a Redfish session.")

    from init_db import initialize_database
    initialize_database(db_path)
    print("Setup complete. Run 'ilo-admin --help' to get started.")


if __name__ == "__main__":
    main()
