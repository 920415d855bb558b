"""Allow ``python -m beanstalk_deploy``."""

from beanstalk_deploy.main import main

main()
