from sharproast.scanners.auth import (scan_authentication, scan_controller_authorization,
                                      scan_critical_functions, scan_csrf, scan_privilege_management)
from sharproast.utils.config import ScanPolicy

CONTROLLER = '''public class UsersController : ControllerBase
{
    [HttpGet]
    public IActionResult Get()
    {
        return Ok();
    }

    [HttpPost]
    public IActionResult DeleteUser(int id)
    {
        return Ok();
    }
}
'''

AUTHORIZED_CONTROLLER = '''[Authorize]
public class AdminController : ControllerBase
{
    [Authorize(Roles = "Admin")]
    [HttpPost]
    [ValidateAntiForgeryToken]
    public IActionResult ResetPassword(int id)
    {
        return Ok();
    }
}
'''


class TestControllerAuthorization:

    def test_unmarked_controller_and_actions(self, make_context):
        findings = scan_controller_authorization(make_context(CONTROLLER))
        assert [f.id for f in findings] == ["AUTH-CONTROLLER", "AUTH-ACTION", "AUTH-ACTION"]
        assert all(f.category == "Authorization" for f in findings)
        assert all(f.severity == "medium" for f in findings)
        assert findings[0].line_number == 1
        assert findings[0].code_snippet == "UsersController"
        assert [f.code_snippet for f in findings[1:]] == ["Get", "DeleteUser"]

    def test_authorized_controller_is_clean(self, make_context):
        assert scan_controller_authorization(make_context(AUTHORIZED_CONTROLLER)) == []

    def test_non_controller_class_is_ignored(self, make_context):
        assert scan_controller_authorization(make_context("public class UserMapper { }")) == []

    def test_severity_comes_from_policy(self, make_context):
        policy = ScanPolicy(authorization_severity="high")
        findings = scan_controller_authorization(make_context(CONTROLLER, policy=policy))
        assert {f.severity for f in findings} == {"high"}

    def test_allow_anonymous_counts_as_marked(self, make_context):
        src = '''[Authorize]
public class HomeController
{
    [AllowAnonymous]
    [HttpGet]
    public string Index() { return "ok"; }
}
'''
        assert scan_controller_authorization(make_context(src)) == []


class TestCsrf:

    def test_post_without_token(self, make_context):
        findings = scan_csrf(make_context(CONTROLLER))
        assert len(findings) == 1
        assert findings[0].id == "AUTH-CSRF"
        assert findings[0].severity == "high"
        assert findings[0].category == "CSRF Protection"

    def test_post_with_token(self, make_context):
        assert scan_csrf(make_context(AUTHORIZED_CONTROLLER)) == []


class TestCriticalFunctions:

    def test_destructive_action_without_authorize(self, make_context):
        findings = scan_critical_functions(make_context(CONTROLLER))
        assert [f.code_snippet for f in findings] == ["DeleteUser"]
        assert findings[0].category == "Missing Authentication"
        assert findings[0].severity == "high"

    def test_authorized_controller(self, make_context):
        assert scan_critical_functions(make_context(AUTHORIZED_CONTROLLER)) == []

    def test_infrastructure_paths_are_skipped(self, make_context):
        ctx = make_context(CONTROLLER, rel_path="Services/UsersController.cs")
        assert scan_critical_functions(ctx) == []

    def test_test_paths_are_skipped(self, make_context):
        ctx = make_context(CONTROLLER, rel_path="Tests/UsersController.cs")
        assert scan_critical_functions(ctx) == []

    def test_custom_verbs(self, make_context):
        policy = ScanPolicy(critical_verbs=["get"])
        findings = scan_critical_functions(make_context(CONTROLLER, policy=policy))
        assert [f.code_snippet for f in findings] == ["Get"]


class TestAuthentication:

    def test_insecure_auth_cookie(self, make_context):
        src = '''public class Login
{
    public void SignIn(string user)
    {
        FormsAuthentication.SetAuthCookie(user, false);
    }
}
'''
        findings = scan_authentication(make_context(src))
        assert [f.id for f in findings] == ["AUTH-COOKIE"]

    def test_cookie_auth_without_https(self, make_context):
        src = '''public class Startup
{
    public void Configure(IServiceCollection services)
    {
        services.AddCookieAuthentication();
    }
}
'''
        findings = scan_authentication(make_context(src))
        assert [f.id for f in findings] == ["AUTH-COOKIE-HTTPS"]
        assert findings[0].severity == "medium"

    def test_registration_without_password_rules(self, make_context):
        src = '''public class Accounts
{
    public void Signup(string name, string password)
    {
        _users.CreateUser(name, password);
    }
}
'''
        findings = scan_authentication(make_context(src))
        assert [f.id for f in findings] == ["AUTH-WEAK-PASSWORD"]
        assert findings[0].category == "Authentication Failures"

    def test_registration_with_length_check(self, make_context):
        src = '''public class Accounts
{
    public void Signup(string name, string password)
    {
        if (password.Length < 12) throw new ArgumentException();
        _users.CreateUser(name, password);
    }
}
'''
        assert scan_authentication(make_context(src)) == []

    def test_chained_calls_reported_once(self, make_context):
        src = '''public class Startup
{
    public void Configure(IServiceCollection services)
    {
        services.AddCookieAuthentication().AddCookie();
        _users.CreateUser(name, password).Wait();
    }
}
'''
        findings = scan_authentication(make_context(src))
        assert [f.id for f in findings] == ["AUTH-COOKIE-HTTPS", "AUTH-WEAK-PASSWORD"]


class TestPrivilegeManagement:

    def test_impersonation(self, make_context):
        src = '''public class Jobs
{
    public void Run(IntPtr handle)
    {
        WindowsIdentity.Impersonate(handle);
    }
}
'''
        findings = scan_privilege_management(make_context(src))
        assert [f.id for f in findings] == ["PRIV-IMPERSONATE"]
        assert findings[0].category == "Privilege Management"

    def test_principal_with_role_check_is_clean(self, make_context):
        src = '''public class Jobs
{
    public bool Allowed()
    {
        var p = Thread.CurrentPrincipal as ClaimsPrincipal;
        return ClaimsPrincipal.Current.IsInRole("Admin");
    }
}
'''
        assert scan_privilege_management(make_context(src)) == []

    def test_principal_without_role_check(self, make_context):
        src = '''public class Jobs
{
    public string Who()
    {
        return ClaimsPrincipal.Current.Identity.Name;
    }
}
'''
        findings = scan_privilege_management(make_context(src))
        assert [f.id for f in findings] == ["PRIV-PRINCIPAL"]

    def test_run_async_is_not_run_as(self, make_context):
        src = '''public class Program
{
    public static async Task Main(string[] args)
    {
        var app = builder.Build();
        await app.RunAsync();
    }
}
'''
        assert scan_privilege_management(make_context(src)) == []

    def test_run_as_call(self, make_context):
        src = '''public class Jobs
{
    public void Elevate(string cmd)
    {
        ProcessHelper.RunAs("admin", cmd);
    }
}
'''
        assert [f.id for f in scan_privilege_management(make_context(src))] == ["PRIV-IMPERSONATE"]

    def test_impersonation_chain_reported_once(self, make_context):
        src = '''public class Jobs
{
    public void Run(IntPtr handle)
    {
        WindowsIdentity.Impersonate(handle).Dispose();
    }
}
'''
        assert [f.id for f in scan_privilege_management(make_context(src))] == ["PRIV-IMPERSONATE"]
